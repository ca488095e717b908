# -*- coding: utf-8 -*-
"""Digital dietitian backend: meal plans, nutrition summaries, chat and health data."""
