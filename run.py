"""
Entry Point Script (Bootstrap)
==============================
Development runner for the GUI without installing the package.

Why is this file needed?
------------------------
1. It is located outside the 'src' package to act as a convenient runner.
2. It modifies 'sys.path' so 'from thermalsentinel...' imports resolve from
   the source tree.

Usage:
    $ python run.py --api-url http://localhost:8080/api
"""
import os
import sys

current_dir: str = os.path.dirname(os.path.abspath(__file__))
src_path: str = os.path.join(current_dir, 'src')
sys.path.insert(0, src_path)

from thermalsentinel.__main__ import main

if __name__ == "__main__":
    main()
