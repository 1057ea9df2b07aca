#!/usr/bin/env python3
"""
Pitwall Lights - OpenF1 race order to Govee LED segments

Polls the OpenF1 position feed and paints the top ten drivers' team
colours onto the segments of a Govee light strip.
"""

from pitwall_lights.main import run

if __name__ == "__main__":
    run()
