#!/usr/bin/env python3
"""
DogVision - canine color perception simulator.

Main entry point. See dogvision/app.py for commands and controls.

Usage:
    python main.py image photo.jpg photo_dog.png
    python main.py live --device 0
"""

import sys

from dogvision.app import main


if __name__ == "__main__":
    sys.exit(main())
