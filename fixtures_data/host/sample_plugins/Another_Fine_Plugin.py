class Another_Fine_Plugin:
    pass
