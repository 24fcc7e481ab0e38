"""Service manager and small HTTP listener services."""