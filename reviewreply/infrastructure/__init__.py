# Infrastructure Layer
# ====================
# Contains all external service integrations:
# - google/: Google Business Profile accounts, locations and reviews
# - llm/: OpenRouter reply generation
# - persistence/: SQLite storage of the connected profile
# - config/: Environment and settings management
#
# This layer can be replaced entirely without affecting domain/application layers.
