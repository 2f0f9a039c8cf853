# run.py
from dotenv import load_dotenv

# Load environment variables from .env file for local development.
# This has to run before Config reads the environment.
load_dotenv()

from greet_service.factory import create_app


def main():
    """Runs the Flask development server. Use a WSGI server like Gunicorn in production."""
    app = create_app()
    # threaded so a slow greeting update never holds up other requests
    app.run(
        host=app.config["HOST"],
        port=app.config["PORT"],
        debug=app.config.get("DEBUG", False),
        threaded=True,
    )


if __name__ == '__main__':
    main()
