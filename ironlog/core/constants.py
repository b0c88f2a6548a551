"""Application constants."""

# Canonical document / export format versions
SCHEMA_VERSION = "1.0.0"
LEGACY_SCHEMA_VERSION = "0.0.0"
EXPORT_VERSION = "1.0.0"
APP_NAME = "IronLog"

# Muscle recovery: hours until a muscle group is fully recovered
MUSCLE_RECOVERY_HOURS: dict[str, int] = {
    "Chest": 84,
    "Shoulders": 72,
    "Back": 72,
    "Biceps": 48,
    "Triceps": 48,
    "Quads": 48,
    "Hamstrings": 60,
    "Glutes": 60,
    "Core": 36,
    "Calves": 36,
}
DEFAULT_RECOVERY_HOURS = 72

# Session volume (kg) treated as full fatigue for a muscle group
MAX_FATIGUE_VOLUMES: dict[str, float] = {
    "Chest": 5000,
    "Shoulders": 3000,
    "Back": 6000,
    "Biceps": 1500,
    "Triceps": 2000,
    "Quads": 8000,
    "Hamstrings": 4000,
    "Glutes": 5000,
    "Core": 2000,
    "Calves": 2500,
}
DEFAULT_MAX_FATIGUE_VOLUME = 5000.0

ALL_MUSCLE_GROUPS = list(MUSCLE_RECOVERY_HOURS)
UPPER_BODY_GROUPS = ["Chest", "Shoulders", "Back", "Biceps", "Triceps"]
LOWER_BODY_GROUPS = ["Quads", "Hamstrings", "Glutes", "Calves"]

# Recovery bands (percent)
RECOVERY_READY_THRESHOLD = 70
RECOVERY_RECOVERING_THRESHOLD = 40
# Lower-half average below this counts as "still fatigued" for suggestions
SUGGESTION_FATIGUED_THRESHOLD = 50

# Credit for secondary muscles when splitting exercise volume by muscle
PRIMARY_MUSCLE_WEIGHT = 1.0
SECONDARY_MUSCLE_WEIGHT = 0.5

# Movement balance
BALANCE_WINDOW_WEEKS = 4
BALANCE_RATIO_THRESHOLD = 1.2
UPPER_BALANCE_MUSCLES = {"chest", "back", "shoulders", "biceps", "triceps", "arms"}
LOWER_BALANCE_MUSCLES = {"quads", "hamstrings", "glutes", "calves", "legs"}

# Analytics windows
WEEKLY_VOLUME_WEEKS = 8
RECENT_PR_DAYS = 30
RECENT_PR_LIMIT = 5

# Training load / effort
TRAINING_LOAD_WEEKS = 4
LOAD_LIGHT_RATIO = 0.8
LOAD_HEAVY_RATIO = 1.2
# RPE metrics are only reported when at least this share of working sets has an RPE
RPE_DATA_MIN_SHARE = 0.3
HARD_SET_MIN_RPE = 8
HARD_SET_MAX_RIR = 2
TYPICAL_INTENSITY_PERCENT = 70
# Assumed RPE for a week with no RPE logged
DEFAULT_WEEK_RPE = 7
EFFORT_LIGHT_BELOW = 7
EFFORT_MODERATE_BELOW = 8
EFFORT_HARD_BELOW = 9
MUSCLE_GROUP_STATS_LIMIT = 8

# Brzycki is only meaningful in this rep range
E1RM_MIN_REPS = 1
E1RM_MAX_REPS = 36

# Template defaults
DEFAULT_TEMPLATE_SETS = 3
MAX_EXERCISES_PER_SESSION = 20
