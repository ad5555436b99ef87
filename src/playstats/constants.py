from __future__ import annotations

# Scoring table
TOUCHDOWN_POINTS = 6
TWO_POINT_POINTS = 2
PAT_POINTS = 1
FIELD_GOAL_POINTS = 3
SAFETY_POINTS = 2

# Field geometry (yards)
HALF_FIELD = 50
FULL_FIELD = 100
END_ZONE_DEPTH = 10
SNAP_DEPTH = 7
FG_DISTANCE_OFFSET = END_ZONE_DEPTH + SNAP_DEPTH  # 17
MIN_YARD = 0
MAX_YARD = HALF_FIELD

# Down/distance
FIRST_AND_TEN_YTG = 10
GOAL_TO_GO_YARD = 10
MAX_DOWN = 4
MIN_YTG = 1

# Special teams
PUNT_INSIDE_YARD = 20
PUNT_TOUCHBACK_YARD = 0

# Quarters (OT=5)
OVERTIME_QUARTER = 5
