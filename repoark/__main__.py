"""Allow `python -m repoark`."""

from repoark.cli.main import main

if __name__ == '__main__':
    main()
