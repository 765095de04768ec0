"""Reinforcement-learning helpers for Block Fit."""
