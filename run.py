#!/usr/bin/env python3
"""
Скрипт запуска API фотографий со свадеб
"""
import sys
import uvicorn
from pathlib import Path

# Добавляем корневую директорию в PYTHONPATH
sys.path.insert(0, str(Path(__file__).parent))

from photoshare.config.settings import get_settings


def main():
    """Главная функция запуска"""
    settings = get_settings()

    Path(settings.upload_path).mkdir(parents=True, exist_ok=True)

    print("Starting photo sharing API...")
    print(f"Address: http://{settings.app_host}:{settings.app_port}")
    print(f"Debug mode: {settings.debug}")
    print(f"Upload path: {settings.upload_path}")

    try:
        uvicorn.run(
            "photoshare.main:create_app",
            factory=True,
            host=settings.app_host,
            port=settings.app_port,
            reload=settings.debug,
            log_level=settings.log_level.lower(),
            access_log=True
        )
    except KeyboardInterrupt:
        print("\nStopped by user")
    except Exception as e:
        print(f"Startup failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
