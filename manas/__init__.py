"""
Manas - Pomodoro timer + dziennik myśli
=======================================
Rdzeń klienta: stan aplikacji, synchronizacja z serwerem
(lub lokalny zapis w trybie gościa) i maszyna stanów timera.
"""

__version__ = "0.1.0"
