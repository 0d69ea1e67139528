import os
from dataclasses import dataclass
from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///trees.db"
    admin_key: str = None
    space_name: str = None
    region: str = "nyc3"
    access_key: str = None
    secret_key: str = None
    upload_preset: str = "trees"
    media_endpoint_url: str = None
    media_public_url: str = None
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: str = "*"

    @classmethod
    def from_env(cls, env_file=None):
        """Read settings from the environment, after loading ``.env`` if present."""
        load_dotenv(env_file)
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            admin_key=os.getenv("ADMIN_KEY") or None,
            space_name=os.getenv("SPACE_NAME"),
            region=os.getenv("REGION", cls.region),
            access_key=os.getenv("ACCESS_KEY"),
            secret_key=os.getenv("SECRET_KEY"),
            upload_preset=os.getenv("MEDIA_UPLOAD_PRESET", cls.upload_preset),
            media_endpoint_url=os.getenv("MEDIA_ENDPOINT_URL"),
            media_public_url=os.getenv("MEDIA_PUBLIC_URL"),
            port=int(os.getenv("PORT", cls.port)),
            debug=os.getenv("FLASK_DEBUG", "False").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            cors_origins=os.getenv("CORS_ORIGINS", cls.cors_origins),
        )

    @property
    def cors_origin_list(self):
        """``CORS_ORIGINS`` is ``*`` or a comma-separated list of origins."""
        if self.cors_origins.strip() == "*":
            return "*"
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
