"""
Fixed values shared by the scheduling algorithms.
"""

GREEDY = "greedy"
PRIORITY = "priority"
EDF = "edf"
FCFS = "fcfs"

# Order used to break ties between strategies with equal projected revenue
STRATEGY_TIE_BREAK_ORDER = (GREEDY, EDF, PRIORITY, FCFS)

MAX_DEADLINE = 365  # days
