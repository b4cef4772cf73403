"""
Tax bracket, FIFO cost-basis and depreciation estimators.
"""
