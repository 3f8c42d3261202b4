from prize2pride.app import AppSettings, bootstrap

__all__ = ["main"]


def main() -> None:
    """Entry point for the application."""
    settings = AppSettings.from_env()
    bootstrap(settings)
    print(f"{settings.app_name} is ready in {settings.app_env} mode.")


if __name__ == "__main__":
    main()
