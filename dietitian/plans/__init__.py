# -*- coding: utf-8 -*-
"""Meal plans (AI weekly plans and doctor-authored manual plans).

Shape handling lives in `normalizer`, nutrition math in `aggregator`; both are
pure and never raise for malformed documents.
"""
