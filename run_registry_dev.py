#!/usr/bin/env python3

"""
Dev runner for the bubble registry.
Runs the spawning-loop simulation with verbose logging so selection and
rotation decisions can be followed frame by frame.
"""
import logging
import os
import sys

# Set default log level from environment, or INFO if not set
# Use DEBUG only if explicitly requested: LOG_LEVEL=DEBUG python run_registry_dev.py
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

from bubbles.app.simulate import main

if __name__ == "__main__":
    try:
        main(sys.argv[1:])
    except KeyboardInterrupt:
        logging.info("Simulation interrupted")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Simulation failed: {e}", exc_info=True)
        sys.exit(1)
