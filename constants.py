# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They are fundamental to the application's framework, such as the force
field modes, the fixed integration constants, and rendering properties
that are not part of the run configuration in `config.json`.
"""

# --- Force Field Modes ---
# Ordered; the index of a name is the tag the force kernel dispatches on.
# Keys 1-8 select these in order.
MODES = (
    "gravity",
    "repulsion",
    "vortex",
    "wave",
    "flow",
    "attractor",
    "chaos",
    "aurora",
)

MODE_DESCRIPTIONS = {
    "gravity": "Particles fall with gravity. Click to repel particles away.",
    "repulsion": "Mouse creates a repulsion field. Particles scatter with turbulence.",
    "vortex": "Particles spiral around your cursor in a hypnotic vortex.",
    "wave": "Sine waves create flowing, undulating motion patterns.",
    "flow": "Noise-like flow fields guide particle movement.",
    "attractor": "Four attractors pull particles into orbital patterns.",
    "chaos": "Random forces create unpredictable, chaotic motion.",
    "aurora": "Particles mimic the flowing motion of aurora borealis.",
}

# --- Integration ---
FRICTION = 0.99         # Velocity multiplier applied once per tick.
BOUNCE_DAMPING = -0.5   # Velocity multiplier on boundary contact.
TIME_STEP = 0.016       # Simulated time added per tick, independent of wall clock.

# --- Trails ---
TRAIL_LENGTH = 10
TRAIL_DECAY = 0.9

# --- Initial Population Ranges ---
INITIAL_SPEED = 1.0             # Velocity components drawn from [-1, 1).
SIZE_RANGE = (1.0, 4.0)
HUE_RANGE = (0.0, 360.0)
BRIGHTNESS_RANGE = (50.0, 100.0)

# --- Parameter Limits (enforced by the control layer, not the engine) ---
PARTICLE_COUNT_RANGE = (100, 2000)
PARTICLE_COUNT_STEP = 100
COLOR_SHIFT_RANGE = (0.0, 360.0)
TURBULENCE_RANGE = (0.0, 2.0)
INTERACTION_RADIUS_RANGE = (50.0, 400.0)

# --- Visualization settings ---
FPS = 60
DEFAULT_WINDOW_SIZE = (1280, 720)
BACKGROUND_COLOR = (0, 0, 5)

# Alpha (0-1) of the darkening fill applied before particles are drawn.
# Lower is a longer trail.
FADE_ALPHA_TRAILS = 0.1
FADE_ALPHA_NO_TRAILS = 0.3

TRAIL_ALPHA = 0.3
TRAIL_WIDTH_RATIO = 0.5
# Ratio of the glow radius to the particle size when bloom is on.
BLOOM_RADIUS_RATIO = 3

SPECTRUM_MAX_HEIGHT = 100   # Pixels for a bin at full magnitude.
SPECTRUM_ALPHA = 0.3

INTERACTION_RING_COLOR = (255, 255, 255, 51)
INTERACTION_RING_WIDTH = 2

STATS_TEXT_COLOR = (255, 255, 255, 204)
STATS_FONT_NAME = "monospace"
STATS_FONT_SIZE = 12
STATS_ORIGIN = (10, 10)
STATS_LINE_SPACING = 15

# Glow sprites are cached per quantised colour; coarser buckets use less memory.
HUE_BUCKET = 6
BRIGHTNESS_BUCKET = 5
SPRITE_CACHE_LIMIT = 2048  # least recently used sprites are dropped beyond this
