from fastapi.middleware.cors import CORSMiddleware

from storefront.config import settings


def configure_cors(app):
    # cookies carry the auth token, so origins must be explicit (no "*")
    origins = settings.cors_origins or ["http://localhost:3000"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400,
    )
