"""
Start script with proper error handling and logging.
"""
import logging
import sys

from signlive.core import config


def main():
    logging.basicConfig(level=config.LOG_LEVEL,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print("=" * 60)
    print("Starting Sign Recognition Server")
    print("=" * 60)

    try:
        import uvicorn
        from signlive.api.routes import app
    except ImportError as e:
        print(f"\n Import error: {e}")
        print("\nPlease install dependencies:")
        print("  pip install -e .")
        sys.exit(1)

    print(f"\nStarting server on http://{config.HOST}:{config.PORT}")
    print("Press Ctrl+C to stop\n")

    uvicorn.run(
        app,
        host=config.HOST,
        port=config.PORT,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
