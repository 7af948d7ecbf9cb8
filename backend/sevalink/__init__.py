"""SevaLink: proximity and skill matching for volunteers and organizations."""
