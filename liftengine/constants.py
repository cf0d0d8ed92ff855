# liftengine/constants.py

# Smallest practical load step (plates / stack pins), in the lifter's unit.
DEFAULT_LOAD_INCREMENT = 5

# Number of heaviest rows per exercise considered for the best e1RM.
HISTORY_WINDOW = 60

# Effort (RPE) scale accepted by the effort table.
MIN_EFFORT_LEVEL = 6
MAX_EFFORT_LEVEL = 10

# Rep counts above this use the last table column.
MAX_TABLE_REPS = 12

# Largest warm-up ramp with a template; longer requests are capped.
MAX_WARMUP_SETS = 4

# A prescription without a working-set count is treated as one set.
DEFAULT_WORKING_SETS = 1

# Rows per exercise read for the e1RM progress chart.
PROGRESS_WINDOW = 1000

# Logged loads are stored in pounds; other units are converted on the way out.
STORED_LOAD_UNIT = "lbs"
