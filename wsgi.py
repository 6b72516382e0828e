# Punto de entrada WSGI: gunicorn wsgi:app  /  flask --app wsgi run
from fixos.main import create_app

app = create_app()
