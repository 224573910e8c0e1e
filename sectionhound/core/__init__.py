"""SectionHound core package - configuration."""
