# Core checkout service modules
