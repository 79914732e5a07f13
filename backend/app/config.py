"""Application configuration"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Database
    database_url: str = "sqlite:///./catalog.db"
    
    # Deployment
    environment: str = "development"
    
    # API Configuration
    cors_origins: str = "http://localhost:5173,http://localhost:3000"
    
    # Server Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    
    # Per-request deadline applied to blob store and database calls
    request_timeout_seconds: float = 30.0
    
    # Blob storage (Cloudinary)
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_folder: str = "catalog"
    upload_workers: int = 4
    temp_upload_dir: str | None = None
    
    # Identity provider (Clerk)
    clerk_api_url: str = "https://api.clerk.com/v1"
    clerk_secret_key: str = ""
    clerk_jwt_key: str = ""
    admin_email: str = ""
    
    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]
    
    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


# Global settings instance
settings = Settings()
