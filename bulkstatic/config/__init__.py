# SPDX-License-Identifier: LGPL-3.0-or-later
# bulkstatic/config/__init__.py
