# Serve with a WSGI server: `gunicorn wsgi:app`
from dotenv import load_dotenv

load_dotenv()

from expense_backend import create_app

app = create_app()
