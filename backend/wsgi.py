# backend/wsgi.py
from ventas import create_app

app = create_app()
