"""
ForkYes - Family meal planning backend.

Families, recipes, weekly plans and shopping lists on Supabase,
with AI meal suggestions from OpenAI.
"""

__version__ = "0.1.0"
