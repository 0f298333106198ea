"""
Bubbles package __main__ entry point.

Allows running the spawning-loop simulation with: python -m bubbles
"""

from bubbles.app.simulate import main

if __name__ == "__main__":
    main()
