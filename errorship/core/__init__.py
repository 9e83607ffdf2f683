"""errorship core: payload construction and the delivery pipeline."""
