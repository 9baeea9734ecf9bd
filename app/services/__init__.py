"""Account and history metrics built on top of the Hive client."""
