# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""AlbumRate Server - album ratings, lists, and Spotify catalog search."""

__version__ = "0.1.0"
