"""MurphyGPT: Slack assistant for The Murphy Group FAQ and SOP library"""
