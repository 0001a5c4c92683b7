import os

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # --- File Limits ---
    max_file_size_mb: int = 50
    max_file_size_bytes: int = 0  # Computed in model_post_init

    # --- Storage ---
    upload_dir: str = "uploads"
    public_upload_path: str = "/uploads"
    job_history_limit: int = 50
    job_retention_limit: int = 1000  # jobs kept in memory, oldest evicted first
    activity_limit: int = 50

    # --- Concurrency ---
    compression_semaphore_size: int = 0  # 0 = use CPU count
    max_queue_depth: int = 0  # 0 = 2 * CPU count

    # --- Security ---
    api_key: str = ""
    admin_api_key: str = ""
    allowed_origins: str = "*"

    # --- Logging ---
    log_level: str = "ERROR"

    model_config = {"env_prefix": "", "case_sensitive": False}

    def model_post_init(self, __context) -> None:
        if self.max_file_size_bytes == 0:
            self.max_file_size_bytes = self.max_file_size_mb * 1024 * 1024
        if self.compression_semaphore_size == 0:
            self.compression_semaphore_size = os.cpu_count() or 4
        if self.max_queue_depth == 0:
            self.max_queue_depth = 2 * self.compression_semaphore_size


settings = Settings()
