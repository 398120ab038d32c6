"""Allow running as: python -m prep_engine.cli"""

from prep_engine.cli.main import main

if __name__ == "__main__":
    main()
