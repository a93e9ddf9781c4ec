# db_tables.py: single source of truth for table names
TEAMS        = "teams"           # default schema: public
PLAYERS      = "players"
