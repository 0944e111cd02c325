#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Global constants for the symbol recognizer trainer
All arbitrary values are centralized here for easy tracking and modification
"""

# =============================================================================
# APPLICATION METADATA
# =============================================================================

APP_NAME = "SymbolRecog"                 # Used for user data directory and log names
APP_VERSION = "0.3.0"

# Production mode - controls logging verbosity
# Set to True for releases, False for development to get full debug information
PRODUCTION_MODE = False


# =============================================================================
# RECOGNIZER MODEL DEFAULTS
# =============================================================================

RECOG_MAX_ARRAY_SIZE = 256               # Maximum number of classes a model can hold
RECOG_MAX_AVERAGE_SAMPLES = 256          # Only the first N samples of a class are averaged
RECOG_THRESHOLD_DEFAULT = 128            # Binarization threshold (pixels darker become foreground)
RECOG_MAX_Y_SHIFT_DEFAULT = 1            # Centroid y-jiggle allowed when matching
RECOG_MIN_NOPAD_DEFAULT = 1              # Minimum samples per class before padding kicks in
RECOG_MAX_LABEL_BYTES = 4                # UTF-8 label longer than this cannot become a class key

# Split bounds derived from the unscaled averages (consumed by segmentation)
SPLIT_MIN_TEMPLATE_SIZE = 5              # Averages smaller than this are ignored (placeholders)
SPLIT_MIN_DIMENSION = 5                  # Floor for min split width/height
SPLIT_SIZE_MARGIN = 5                    # Subtracted from the smallest average width/height
SPLIT_SKEW_MARGIN = 12                   # Added to the tallest average height (skew allowance)


# =============================================================================
# MULTI-SYMBOL INGESTION
# =============================================================================

MULTI_CLOSING_HEIGHT = 70                # Height of the vertical closing that consolidates symbols
MULTI_MIN_REGION_WIDTH = 2               # Regions must be wider than this...
MULTI_MIN_REGION_HEIGHT = 8              # ...and taller than this to count as a symbol
CONNECTIVITY = 8                         # Connectivity for connected components


# =============================================================================
# OUTLIER REMOVAL
# =============================================================================

OUTLIER_MIN_SCORE_DEFAULT = 0.75         # Keep everything scoring at least this
OUTLIER_MIN_FRACTION_DEFAULT = 0.5       # Minimum fraction of each class to keep
OUTLIER_SCALE_HEIGHT = 40                # Height the throwaway scoring model scales to
OUTLIER_MATCH_TOLERANCE = 5              # Alignment search window (pixels, both axes)


# =============================================================================
# BOOTSTRAP RECOGNIZER
# =============================================================================

BOOT_SCALE_HEIGHT = 40                   # Boot templates are scaled to this height
BOOT_LINE_WIDTH = 5                      # Stroke width of boot templates (0 = image templates)
BOOT_MIN_SCORE_DEFAULT = 0.75            # Minimum match score to accept a bootstrap label
BOOT_WIDTH_SCALE_FACTORS = (0.9, 1.1, 1.2)  # Horizontal scalings added to the synthetic digits
BOOT_FONT_SCALE = 1.6                    # cv2.putText font scale for synthetic digits
BOOT_FONT_THICKNESS = 3                  # cv2.putText stroke thickness for synthetic digits
BOOT_CANVAS_SIZE = 96                    # Square canvas the digits are rendered on


# =============================================================================
# DIAGNOSTICS
# =============================================================================

DEBUG_DIR_NAME = "recog_debug"           # Sub-directory of the user data dir for debug images
DEBUG_BORDER = 2                         # Border drawn around debug tiles
DEBUG_TILE_SPACING = 20                  # Spacing between tiles in debug mosaics
DEBUG_MAX_ROW_WIDTH = 1500               # Debug mosaics wrap at this width


# =============================================================================
# LOGGING CONSTANTS
# =============================================================================

LOG_MAX_FILE_SIZE_MB_DEFAULT = 10        # Rotate the session log at this size
LOG_SEPARATOR_WIDTH = 80                 # Width of separator lines in logs (e.g., "=" * 80)
LOG_FILE_PATTERN = "symbolrecog_*.log"
LOG_TIMESTAMP_FORMAT = "%d-%m-%Y_%H-%M-%S"  # European format, Windows-compatible
LOG_MAX_AGE_S = 24 * 60 * 60             # Old session logs are removed after a day


# =============================================================================
# FILE AND DIRECTORY PATHS
# =============================================================================

CONFIG_FILE_NAME = "config.ini"
CONFIG_SECTION = "Recognizer"
TEMPLATE_FILE_PATTERN = "*.png"
DEFAULT_TEMPLATES_DIR = "templates/digits"
DEFAULT_OUTPUT_DIR = "templates/averages"
