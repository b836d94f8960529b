#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Convert a meal production sheet into printable A4 label sheets.
"""

# local repo modules
import meal_label_sheets.cli


if __name__ == "__main__":
	meal_label_sheets.cli.main()
