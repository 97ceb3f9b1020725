"""Notification delivery and presentation service for practice management.

Regular package marker so ``app`` never resolves to an unrelated namespace
package installed in the environment.
"""
