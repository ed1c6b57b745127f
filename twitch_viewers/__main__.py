import sys

from twitch_viewers.main import main

if __name__ == "__main__":
    sys.exit(main())
