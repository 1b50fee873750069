"""
TermLens core: term catalog, detection, annotation rendering, caret tracking,
rescan scheduling and hover resolution
"""
