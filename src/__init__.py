"""SnapSong: song, preview clip and caption recommendations for a photo."""
