"""
Application services layer (use cases).

- title_localizer: display title selection from a title set
- fuzzy_matcher: tolerant title pattern, candidate search and best-id ranking
- resolver: series, movie, season and episode resolution for a media host

Services receive their collaborators by injection (see animeta.container).
"""
