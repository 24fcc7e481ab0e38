"""Log field collections, status-code to log-level mappings and logging options."""