# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later
