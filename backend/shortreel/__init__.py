"""ShortReel - topic to narrated vertical short video."""
