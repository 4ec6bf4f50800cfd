# QR Attendance Service - Modules Package
"""
Core modules for the QR code attendance service: the SQLite store, id
allocation, QR generation, attendance marking and the Excel export.
"""
