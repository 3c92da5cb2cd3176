"""Staff onboarding portal API."""
