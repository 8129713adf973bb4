"""Pesantren System package.

Aplikasi administrasi pesantren: presensi, jadwal, jurnal mengajar, kalender
akademik, halaqoh dan modul Orang Tua Asuh (OTA). Setiap fitur adalah modul
tersendiri (model, repository, service, controller) di atas Flask.
"""
