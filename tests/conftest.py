import matplotlib

# Headless backend for every test that touches plotting
matplotlib.use("Agg")
