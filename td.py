"""td entry point - run the CLI without installing the package

    python td.py auth login
"""

from cli.main import main

if __name__ == "__main__":
    main()
