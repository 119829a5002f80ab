# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/cli/__init__.py
