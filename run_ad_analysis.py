#!/usr/bin/env python
"""
Run Alzheimer's Biomarker Analysis
This script runs the biomarker analysis pipeline
"""

import os
import sys

# Add the src directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), 'src')))

from ad_analysis.main import main

if __name__ == "__main__":
    sys.exit(main())
