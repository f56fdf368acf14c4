"""stripe-spine CLI package."""
