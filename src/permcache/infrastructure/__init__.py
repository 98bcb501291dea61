"""Settings, logging and component wiring for permcache."""
