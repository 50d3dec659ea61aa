#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Render coupon records onto a template as single images or tiled A4 sheets.
"""

# local repo modules
import coupon_template_engine.cli


if __name__ == "__main__":
	coupon_template_engine.cli.main()
