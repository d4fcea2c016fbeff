# Review Reply - Google Review Reply Assistant
# ============================================
# Drafts replies to Google Business Profile reviews with an LLM, lets the
# owner edit them, and publishes them back. Layered Architecture:
#
# ARCHITECTURE LAYERS:
# - Presentation:   JSON API (web/) and the batch runner script
# - Application:    Review store, reply controllers, session coordinator
# - Domain:         Review lifecycle model and error taxonomy
# - Infrastructure: External services (Google Business Profile, LLM, SQLite)
#
# Infrastructure components sit behind small abstract interfaces so the
# review platform or the LLM provider can be swapped without touching the
# application layer.
