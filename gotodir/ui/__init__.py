"""Interactive inline picker: query editing, popup rendering and terminal handling."""