"""
Routers module - API endpoint handlers organized by feature.

- generation: prompt optimization, page generation, pool status, preview
- chat: code assistant
- sessions: session IDs and cloud sync
"""
