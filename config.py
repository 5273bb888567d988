"""
Configuration parameters for Galaxy of Games - Space Chart.

This module defines all layout parameters:
- Canvas and cluster anchors (one anchor per top genre)
- Forces (cluster attraction, mutual repulsion, cooling, damping)
- Collision separation (padding, relaxation strength)
- Scales (weight → radius, quality → brightness)
- Halos, probe ("spaceship") and data filtering

Units are screen pixels. The canvas is [0, SPACE_WIDTH) × [0, SPACE_HEIGHT)
with y pointing down, same as the SVG the chart was first drawn in.
"""

import math

# ==============================================================================
# Canvas
# ==============================================================================

SPACE_WIDTH = 800           # Layout width (px)
SPACE_HEIGHT = 700          # Layout height (px)
FPS_TARGET = 60             # Host clock: one tick per rendered frame

# ==============================================================================
# Clusters (top genres found from data exploration)
# ==============================================================================

TOP_GENRES = [
    "Action",
    "Adventure",
    "Simulation",
    "RPG",
    "Strategy",
    "Casual",
    "Racing",
]

GENRE_COLORS = [
    "#e6194b",
    "#3cb44b",
    "#0082c8",
    "#f58231",
    "#46f0f0",
    "#f032e6",
    "#135021",
]

# Fixed anchor per genre. The set of valid cluster labels is exactly this key set.
CLUSTER_CENTERS = {
    "Action": (400.0, 300.0),
    "Adventure": (189.0, 350.0),
    "Simulation": (530.0, 482.0),
    "RPG": (180.0, 250.0),
    "Strategy": (256.0, 427.0),
    "Casual": (559.0, 150.0),
    "Racing": (250.0, 90.0),
}

# ==============================================================================
# Forces
# ==============================================================================

ATTRACTION_STRENGTH = 0.5   # Per-axis spring towards the cluster anchor
REPULSION_STRENGTH = -10.0  # Many-body charge (negative = repel)
DISTANCE_MIN2 = 1.0         # Squared floor on pair distance in the repulsion term
JIGGLE = 1e-6               # Offset applied to exactly coincident centres
GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))  # Spreads coincident pairs and seeds around the circle

# ==============================================================================
# Cooling (alpha) and damping
# ==============================================================================
# Every force is scaled by alpha. Alpha decays geometrically towards
# ALPHA_TARGET, reaching ~ALPHA_MIN after ~300 ticks. The loop keeps ticking
# after that; forces just become negligible and collisions finish settling.

ALPHA_START = 1.0
ALPHA_MIN = 0.001
ALPHA_DECAY = 1.0 - ALPHA_MIN ** (1.0 / 300.0)   # ≈ 0.0228 per tick
ALPHA_TARGET = 0.0

VELOCITY_DECAY = 0.4        # Velocity *= (1 - VELOCITY_DECAY) before it moves a node

# ==============================================================================
# Collision separation
# ==============================================================================

COLLIDE_PADDING = 2.0       # Collision radius = display radius + padding
COLLIDE_STRENGTH = 0.7      # Fraction of the overlap removed per pass (split 50/50)
COLLIDE_TOLERANCE = 0.5     # Overlap considered "resolved" (diagnostics and tests)

# ==============================================================================
# Scales
# ==============================================================================

SIZE_RANGE = (1.0, 100.0)               # Node radius range (sqrt of player count)
BACKGROUND_SIZE_RANGE = (10.0, 110.0)   # Genre-coloured square behind each node
BRIGHTNESS_RANGE = (0.0, 0.8)           # Lightness range (positive review %)
DEFAULT_BRIGHTNESS = 0.4                # Lightness for games without a review score

INDIE_HUE = 45              # Node hue for games tagged Indie
AAA_HUE = 275               # Node hue for everything else

# ==============================================================================
# Cluster halos
# ==============================================================================

HALO_PADDING = 1.0          # Member contributes distance + radius × HALO_PADDING
HALO_MAX = 150.0            # Hard cap to prevent huge halos
HALO_FALLBACK = 50.0        # Radius drawn for a cluster without members

# ==============================================================================
# Probe ("spaceship")
# ==============================================================================

PROBE_WIDTH = 20.0
PROBE_HEIGHT = 20.0
PROBE_SIZE = max(PROBE_WIDTH, PROBE_HEIGHT)
PROBE_START = (SPACE_WIDTH / 2.0, SPACE_HEIGHT / 2.0)
PROBE_STEP = 10.0           # Pixels per movement command

# ==============================================================================
# Data filtering
# ==============================================================================

MIN_PLAYERS = 20            # Games below this current player count are not loaded

DEFAULT_GAMES_CSV = "data/steam_games.csv"
DEFAULT_PLAYERS_CSV = "data/current_players.csv"
DEFAULT_RADAR_CSV = "data/games-2.csv"

RADAR_YEAR_MIN = 2016       # Year buttons offered on the radar side
RADAR_YEAR_MAX = 2024
RADAR_MAX_VALUE = 100.0     # Normalized radar axis maximum

# ==============================================================================
# Numerics
# ==============================================================================

EPS = 1e-8                  # Small epsilon for numerical safety
