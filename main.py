"""
Parks Incident Desk - Root Entry Point.

For development: python main.py
For production: point uvicorn or gunicorn at ``main:app``
"""

from parks_incidents.main import get_application, run_server

# ASGI entry point
app = get_application()

if __name__ == "__main__":
    run_server()
