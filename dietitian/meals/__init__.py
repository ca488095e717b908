# -*- coding: utf-8 -*-
"""Meal-level helpers shared by plans, bookmarks and meal logs."""
