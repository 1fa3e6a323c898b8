import os

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    # Only read DATABASE_URL from env; if missing, app factory will set a proper sqlite path
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Typed by an admin before any competitor deletion. Friction only, roles are the real gate.
    DELETE_CONFIRMATION_SECRET = os.getenv("DELETE_CONFIRMATION_SECRET", "9999")

    # List views
    PAGE_SIZE = int(os.getenv("PAGE_SIZE", "50"))

    # Live statistics screen
    LIVE_REFRESH_SECONDS = int(os.getenv("LIVE_REFRESH_SECONDS", "5"))

    # Display
    DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "Asia/Muscat")
    COMPETITION_TITLE = os.getenv(
        "COMPETITION_TITLE", "مسابقة مركز رياض العلم لحفظ القرآن الكريم"
    )


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    DELETE_CONFIRMATION_SECRET = "9999"
    PAGE_SIZE = 50
